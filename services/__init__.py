from .packing_service import PackingService
