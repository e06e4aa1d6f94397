from shop.services.catalog import CatalogService, CustomerService
from shop.services.compensation import CancellationService
from shop.services.orders import OrderService
from shop.services.reporting import OrderStatistics, ReportingService

__all__ = [
    "CancellationService",
    "CatalogService",
    "CustomerService",
    "OrderService",
    "OrderStatistics",
    "ReportingService",
]
