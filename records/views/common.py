from rest_framework.response import Response

from records.serializers.common import ListQuerySerializer


def paginated(request, items, format_page):
    """Slice ``items`` by ``$limit``/``$skip`` and wrap the page.

    ``items`` is a queryset or a list; ``format_page`` turns the sliced
    page into a list of dicts.
    """
    limit, skip = ListQuerySerializer.from_query(request.query_params)
    total = len(items) if isinstance(items, list) else items.count()
    page = list(items[skip:skip + limit]) if limit else []
    return Response({'ok': True, 'total': total, 'limit': limit, 'skip': skip, 'data': format_page(page)})


def ordered_by_ids(qs, ids):
    """Fetch ``ids`` from ``qs`` keeping the order of ``ids``."""
    rows = {obj.pk: obj for obj in qs.filter(pk__in=ids)}
    return [rows[i] for i in ids if i in rows]
