"""
Default DRF pagination for list endpoints (catalogue, orders, sync logs).

Clients may ask for up to ``max_page_size`` rows with ``?page_size=``.
"""
from rest_framework.pagination import PageNumberPagination


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100
