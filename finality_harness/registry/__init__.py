from .application_instance import ApplicationInstance as ApplicationInstance
from .instance_registry import InstanceRegistry as InstanceRegistry
