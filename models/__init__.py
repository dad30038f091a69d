from .pincode_rule import Pincode_Rule
