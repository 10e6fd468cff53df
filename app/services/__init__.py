"""Domain services shared by the API routers, webhooks and background jobs"""
