from postwire.service.protocol import Service
from postwire.service.service_module import ServiceModule, endpoint_method_names

__all__ = [
    "Service",
    "ServiceModule",
    "endpoint_method_names",
]
