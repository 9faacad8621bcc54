"""
Pagination metadata

Pure functions, no I/O.
"""

from models import Metadata


def last_page_for(total_records: int, page_size: int) -> int:
    """ceil(total_records / page_size) in integer arithmetic"""
    return -(-total_records // page_size)


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    """
    Map (total, page, page_size) to pagination metadata.

    Zero records yields the all-zero Metadata regardless of page/size.
    The requested page is reported as-is, even when it is past last_page.
    """
    if total_records == 0:
        return Metadata.empty()
    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=last_page_for(total_records, page_size),
        total_records=total_records,
    )


def is_out_of_range(metadata: Metadata, page: int) -> bool:
    """True when page lies beyond the last page of a non-empty result"""
    return not metadata.is_empty and page > metadata.last_page
