import bleach
from rest_framework import serializers

from records.models import PersonalData


def _clean(v):
    return bleach.clean((v or '').strip(), tags=[], strip=True) if v is not None else None


class PersonalDataSerializer(serializers.Serializer):
    firstName = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    lastName = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    nationality = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2)
    documentType = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    documentValue = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    maritalStatus = serializers.ChoiceField(
        choices=[c[0] for c in PersonalData.MARITAL_CHOICES], required=False, allow_null=True
    )
    birthDate = serializers.DateTimeField(required=False, allow_null=True)

    def validate_documentValue(self, v):
        return _clean(v) or None

    def validate_nationality(self, v):
        return (v or '').upper() or None


class ContactDataSerializer(serializers.Serializer):
    streetAddress = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    city = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=128)
    province = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=8)
    country = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2)
    phoneNumber = serializers.ListField(child=serializers.CharField(max_length=64), required=False, allow_null=True)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)

    def validate_streetAddress(self, v):
        return _clean(v)

    def validate_city(self, v):
        return _clean(v)


class PatientWriteSerializer(serializers.Serializer):
    medicare = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=128)
    medicareNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    medicarePlan = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=128)
    mugshot = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    gender = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=16)
    personalData = PersonalDataSerializer(required=False)
    contactData = ContactDataSerializer(required=False)


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True)
    firstName = serializers.CharField(required=False, allow_blank=True)
    lastName = serializers.CharField(required=False, allow_blank=True)
    documentValue = serializers.CharField(required=False, allow_blank=True)
    birthDate = serializers.DateField(required=False)
    deleted = serializers.BooleanField(required=False, default=False)
