from .pincode_rule_controller import pincode_rule_router
