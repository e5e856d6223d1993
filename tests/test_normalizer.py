"""
Tests for normalizing text-generation responses.
"""
import json

import pytest

from mrzscan.errors import IncompleteDataError, UnparsableResponseError
from mrzscan.normalizer import extract_json, normalize_response, reconcile_fields
from mrzscan.record import FIELD_KEYS

CSV_ROW = "P,UTO,ERIKSSON,ANNA MARIA,L898902C3,UTO,12.08.1974,F,15.04.2030,ZE184226B,16.04.2020,ZENITH,MFA"


class TestJsonExtraction:
    """JSON is located by its outermost brackets."""

    def test_code_fence_is_ignored(self):
        text = '```json\n{"documentNumber": "AB1234567", "surname": "DOE"}\n```'
        fields = normalize_response(text)
        assert fields["documentNumber"] == "AB1234567"
        assert fields["surname"] == "DOE"

    def test_prose_around_object(self):
        text = 'Here is the data you asked for: {"documentNumber": "AB1234567"} Let me know!'
        assert normalize_response(text)["documentNumber"] == "AB1234567"

    def test_nested_braces(self):
        assert extract_json('x {"a": {"b": 1}} y') == {"a": {"b": 1}}

    def test_array_with_one_object(self):
        text = '[{"documentNumber": "AB1234567", "sex": "M"}]'
        fields = normalize_response(text)
        assert fields["sex"] == "M"

    def test_all_keys_present_in_output(self):
        fields = normalize_response('{"documentNumber": "AB1234567"}')
        assert tuple(fields) == FIELD_KEYS
        assert fields["authority"] == ""

    def test_non_string_values_are_stringified(self):
        assert normalize_response('{"documentNumber": 123456789}')["documentNumber"] == "123456789"

    def test_invalid_json(self):
        with pytest.raises(UnparsableResponseError) as exc:
            normalize_response('{"documentNumber": "AB1234567",}')
        assert exc.value.error_code == "UNPARSABLE_RESPONSE"

    def test_unbalanced_brackets(self):
        with pytest.raises(UnparsableResponseError):
            normalize_response('Result: {"documentNumber": "AB1234567"')

    @pytest.mark.parametrize("text", ["[]", "[1, 2]", '"just a string" [3]'])
    def test_array_without_object(self, text):
        with pytest.raises(UnparsableResponseError):
            normalize_response(text)


class TestFieldReconciliation:
    """English keys first, then alternates."""

    def test_russian_keys(self):
        obj = {"Фамилия": "ИВАНОВ", "Имя": "ИВАН", "Номер документа": "123456789", "Дата выдачи": "01.02.2020"}
        fields = reconcile_fields(obj)
        assert fields["surname"] == "ИВАНОВ"
        assert fields["givenName"] == "ИВАН"
        assert fields["documentNumber"] == "123456789"
        assert fields["dateOfIssue"] == "01.02.2020"

    def test_english_key_wins(self):
        fields = reconcile_fields({"Фамилия": "ИВАНОВ", "surname": "IVANOV"})
        assert fields["surname"] == "IVANOV"

    def test_snake_case_keys(self):
        fields = reconcile_fields({"document_number": "X1", "date_of_birth": "01.01.1990"})
        assert fields["documentNumber"] == "X1"
        assert fields["dateOfBirth"] == "01.01.1990"

    def test_empty_english_value_falls_back(self):
        fields = reconcile_fields({"surname": "", "Фамилия": "ИВАНОВ"})
        assert fields["surname"] == "ИВАНОВ"

    def test_bilingual_json_response(self):
        text = "```json\n" + json.dumps({"Номер паспорта": "FA1234567", "Пол": "М"}, ensure_ascii=False) + "\n```"
        fields = normalize_response(text)
        assert fields["documentNumber"] == "FA1234567"
        assert fields["sex"] == "М"


class TestCsv:
    """Flat CSV answers in fixed column order."""

    def test_full_row(self):
        fields = normalize_response(CSV_ROW)
        assert fields["surname"] == "ERIKSSON"
        assert fields["authority"] == "MFA"

    def test_header_and_fence_are_skipped(self):
        header = ",".join(FIELD_KEYS)
        fields = normalize_response("```csv\n" + header + "\n" + CSV_ROW + "\n```")
        assert fields["documentNumber"] == "L898902C3"

    def test_quoted_comma(self):
        row = CSV_ROW.replace(",MFA", ',"Ministry, UTO"')
        assert normalize_response(row)["authority"] == "Ministry, UTO"

    def test_too_few_columns(self):
        short = ",".join(CSV_ROW.split(",")[:10])
        with pytest.raises(IncompleteDataError) as exc:
            normalize_response(short)
        assert exc.value.details == {"expected": 13, "found": 10}


class TestUnparsable:
    """Responses without any structure."""

    @pytest.mark.parametrize("text", ["", "   ", "I could not read this document"])
    def test_no_structure(self, text):
        with pytest.raises(UnparsableResponseError):
            normalize_response(text)

    @pytest.mark.parametrize("text", [
        "Sorry, I could not read this document.",
        "The image is blurry, please upload a sharper photo, thanks.",
    ])
    def test_prose_with_commas_is_not_csv(self, text):
        with pytest.raises(UnparsableResponseError):
            normalize_response(text)
