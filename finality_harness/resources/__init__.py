from .directory_allocator import DirectoryAllocator as DirectoryAllocator
from .port_allocator import PortAllocator as PortAllocator
from .resource_allocator import ResourceAllocator as ResourceAllocator
