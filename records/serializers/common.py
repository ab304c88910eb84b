from rest_framework import serializers

DEFAULT_LIMIT = 10
MAX_LIMIT = 200


class ListQuerySerializer(serializers.Serializer):
    """``$limit`` / ``$skip`` pagination (plain ``limit``/``skip`` also accepted)."""
    limit = serializers.IntegerField(required=False, min_value=0, max_value=MAX_LIMIT)
    skip = serializers.IntegerField(required=False, min_value=0)

    @classmethod
    def from_query(cls, params):
        data = {
            'limit': params.get('$limit', params.get('limit')),
            'skip': params.get('$skip', params.get('skip')),
        }
        s = cls(data={k: v for k, v in data.items() if v not in (None, '')})
        s.is_valid(raise_exception=True)
        limit = s.validated_data.get('limit')
        return (DEFAULT_LIMIT if limit is None else limit), s.validated_data.get('skip') or 0
