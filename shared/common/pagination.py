# shared/common/pagination.py
"""
Pagination classes shared by the service APIs.
"""

from collections import OrderedDict
from typing import Any

from rest_framework.pagination import PageNumberPagination, CursorPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """
    Page number pagination returning total count, page info and links.
    """

    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response(self, data: Any) -> Response:
        return Response(OrderedDict([
            ('success', True),
            ('count', self.page.paginator.count),
            ('total_pages', self.page.paginator.num_pages),
            ('current_page', self.page.number),
            ('next', self.get_next_link()),
            ('previous', self.get_previous_link()),
            ('results', data)
        ]))


class AuditTrailPagination(CursorPagination):
    """
    Cursor pagination for append-only audit tables, newest first.

    Views set `ordering` to their timestamp column; new rows never shift pages.
    """

    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200
    ordering = '-recorded_at'

    def get_paginated_response(self, data: Any) -> Response:
        return Response(OrderedDict([
            ('success', True),
            ('next', self.get_next_link()),
            ('previous', self.get_previous_link()),
            ('results', data)
        ]))
