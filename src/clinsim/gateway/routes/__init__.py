"""Gateway 路由"""
