# shared/common/pagination.py
"""
Custom Pagination Classes for API responses
"""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from collections import OrderedDict
from typing import Any, Dict


class StandardPagination(PageNumberPagination):
    """
    Page number pagination wrapped in the success envelope.
    Returns the page of results with total count and navigation links.
    """

    page_size = 10
    page_size_query_param = 'limit'
    max_page_size = 100
    page_query_param = 'page'

    def get_pagination_info(self) -> Dict:
        return OrderedDict([
            ('count', self.page.paginator.count),
            ('total_pages', self.page.paginator.num_pages),
            ('current_page', self.page.number),
            ('page_size', self.get_page_size(self.request)),
            ('next', self.get_next_link()),
            ('previous', self.get_previous_link()),
        ])

    def get_paginated_response(self, data: Any) -> Response:
        return Response(OrderedDict([
            ('status', 'success'),
            ('data', OrderedDict([
                ('results', data),
                ('pagination', self.get_pagination_info()),
            ])),
        ]))

    def get_paginated_response_schema(self, schema: Dict) -> Dict:
        return {
            'type': 'object',
            'properties': {
                'status': {'type': 'string', 'example': 'success'},
                'data': {
                    'type': 'object',
                    'properties': {
                        'results': schema,
                        'pagination': {
                            'type': 'object',
                            'properties': {
                                'count': {'type': 'integer', 'example': 100},
                                'total_pages': {'type': 'integer', 'example': 10},
                                'current_page': {'type': 'integer', 'example': 1},
                                'page_size': {'type': 'integer', 'example': 10},
                                'next': {'type': 'string', 'nullable': True},
                                'previous': {'type': 'string', 'nullable': True},
                            }
                        },
                    }
                },
            }
        }
