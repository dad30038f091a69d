from .dashboard_controller import dashboard_router
