from .lookup_controller import lookup_router
