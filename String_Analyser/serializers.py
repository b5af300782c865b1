from django.core.validators import ProhibitNullCharactersValidator
from rest_framework import serializers
from rest_framework.validators import ProhibitSurrogateCharactersValidator


class StrictCharField(serializers.CharField):
    """CharField that refuses to coerce numbers and other JSON types into text."""

    default_error_messages = {
        'invalid': 'Value must be a string.',
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Any Python string is valid input, NUL and lone surrogates included.
        self.validators = [
            validator for validator in self.validators
            if not isinstance(validator, (ProhibitNullCharactersValidator, ProhibitSurrogateCharactersValidator))
        ]

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail('invalid')
        return super().to_internal_value(data)


class StringPropertiesSerializer(serializers.Serializer):
    length = serializers.IntegerField()
    is_palindrome = serializers.BooleanField()
    unique_characters = serializers.IntegerField()
    word_count = serializers.IntegerField()
    sha256_hash = serializers.CharField()
    character_frequency_map = serializers.DictField(child=serializers.IntegerField())


class StringRecordSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    value = serializers.CharField(read_only=True)
    properties = StringPropertiesSerializer(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class StringAnalyzeSerializer(serializers.Serializer):
    value = StrictCharField(allow_blank=True, trim_whitespace=False)

    def error_code(self):
        """
        Code of the first validation error on ``value``.

        'required' means the field is missing, 'null' and 'invalid' mean it
        has the wrong type. Errors on the body itself surface as 'invalid_body'.
        """
        errors = self.errors
        if 'value' in errors:
            return errors['value'][0].code
        return 'invalid_body'

    def create(self, validated_data):
        # The record store is passed in by the view: serializer.save(store=...)
        store = validated_data.pop('store')
        return store.insert(validated_data['value'])


class BooleanTextField(serializers.Field):
    """Query-string boolean: only the text "true" (any case) is truthy."""

    def to_internal_value(self, data):
        return str(data).strip().lower() == 'true'

    def to_representation(self, value):
        return bool(value)


class StringFilterSerializer(serializers.Serializer):
    is_palindrome = BooleanTextField(required=False)
    min_length = serializers.IntegerField(required=False, min_value=0)
    max_length = serializers.IntegerField(required=False, min_value=0)
    word_count = serializers.IntegerField(required=False, min_value=0)
    contains_character = serializers.CharField(required=False, trim_whitespace=False)

    def to_internal_value(self, data):
        # Empty query parameters mean "not supplied".
        supplied = {key: value for key, value in data.items() if value != ''}
        return super().to_internal_value(supplied)
