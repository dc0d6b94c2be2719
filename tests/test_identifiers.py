import unittest

from colophon.document import parse_document
from colophon.identifiers import ONIX_CODE_LIST_5, format_isbn, get_isbn, parse_identifiers, set_isbn


def _opf(metadata: str, unique_identifier: str = "bookid") -> str:
    return (
        "<package xmlns=\"http://www.idpf.org/2007/opf\" "
        f"unique-identifier=\"{unique_identifier}\" version=\"3.0\">"
        "<metadata xmlns:dc=\"http://purl.org/dc/elements/1.1/\" xmlns:opf=\"http://www.idpf.org/2007/opf\">"
        f"{metadata}"
        "</metadata>"
        "</package>"
    )


class IsbnNormalizationTests(unittest.TestCase):
    def test_ten_digits_become_hyphenated_isbn10(self) -> None:
        identifiers: dict = {}
        set_isbn(identifiers, "0330320025")
        self.assertEqual(identifiers, {"ISBN-10": "0-330-32002-5"})

    def test_thirteen_digits_become_hyphenated_isbn13(self) -> None:
        identifiers: dict = {}
        set_isbn(identifiers, "urn:isbn:9781430265726")
        self.assertEqual(identifiers, {"ISBN-13": "978-1-4302-6572-6"})

    def test_other_lengths_are_discarded(self) -> None:
        for text in ("", "123", "0-8044-2957-X", "97814302657261"):
            identifiers: dict = {}
            set_isbn(identifiers, text)
            self.assertEqual(identifiers, {}, text)

    def test_invalid_checksum_keeps_digits(self) -> None:
        self.assertEqual(format_isbn("1234567890"), "1234567890")
        identifiers: dict = {}
        set_isbn(identifiers, "978-1234567890")
        self.assertEqual(identifiers, {"ISBN-13": "9781234567890"})

    def test_get_isbn_prefers_isbn13(self) -> None:
        self.assertEqual(get_isbn({"ISBN-10": "a", "ISBN-13": "b"}), "b")
        self.assertEqual(get_isbn({"ISBN-10": "a"}), "a")
        self.assertIsNone(get_isbn({"UUID": "x"}))


class ParseIdentifiersTests(unittest.TestCase):
    def test_no_package_or_identifiers(self) -> None:
        self.assertEqual(parse_identifiers(parse_document("<opf/>")), {})
        self.assertEqual(parse_identifiers(parse_document(_opf("<dc:title>x</dc:title>"))), {})

    def test_uuid_and_uris(self) -> None:
        doc = parse_document(
            _opf(
                "<dc:identifier id=\"bookid\" opf:scheme=\"uuid\">8ad7cb26-947b-4e7f-89e9-40fd8a4e530a</dc:identifier>"
                "<dc:identifier opf:scheme=\"URI\">http://www.gutenberg.org/ebooks/851</dc:identifier>"
                "<dc:identifier opf:scheme=\"URI\">http://example.com/2</dc:identifier>"
            )
        )
        self.assertEqual(
            parse_identifiers(doc),
            {
                "UUID": "8ad7cb26-947b-4e7f-89e9-40fd8a4e530a",
                "URIs": ("http://www.gutenberg.org/ebooks/851", "http://example.com/2"),
            },
        )

    def test_legacy_isbn_scheme_is_case_insensitive(self) -> None:
        doc = parse_document(_opf("<dc:identifier opf:scheme=\"isbn\">0-330-32002-5</dc:identifier>"))
        self.assertEqual(parse_identifiers(doc), {"ISBN-10": "0-330-32002-5"})

    def test_onix_codelist_identifiers(self) -> None:
        doc = parse_document(
            _opf(
                "<dc:identifier id=\"isbn13\">urn:isbn:9780741014559</dc:identifier>"
                "<meta refines=\"#isbn13\" property=\"identifier-type\" scheme=\"onix:codelist5\">15</meta>"
                "<dc:identifier id=\"doi\">10.1038/nature04586</dc:identifier>"
                "<meta refines=\"#doi\" property=\"identifier-type\" scheme=\"onix:codelist5\">6</meta>"
                "<dc:identifier id=\"oclc\">12345</dc:identifier>"
                "<meta refines=\"#oclc\" property=\"identifier-type\" scheme=\"onix:codelist5\">23</meta>"
            )
        )
        identifiers = parse_identifiers(doc)
        self.assertEqual(identifiers["ISBN-13"].replace("-", ""), "9780741014559")
        self.assertIn("-", identifiers["ISBN-13"])
        self.assertEqual(identifiers["OCLC number"], "12345")
        self.assertEqual(identifiers["DOI"], "10.1038/nature04586")

    def test_unknown_onix_code_falls_through_to_isbn_id(self) -> None:
        doc = parse_document(
            _opf(
                "<dc:identifier id=\"isbn-print\">9781430265726</dc:identifier>"
                "<meta refines=\"#isbn-print\" property=\"identifier-type\" scheme=\"onix:codelist5\">99</meta>"
            )
        )
        self.assertEqual(parse_identifiers(doc), {"ISBN-13": "978-1-4302-6572-6"})

    def test_isbn_like_id(self) -> None:
        doc = parse_document(_opf("<dc:identifier id=\"ISBN9781430265726\">9781430265726</dc:identifier>"))
        self.assertEqual(parse_identifiers(doc), {"ISBN-13": "978-1-4302-6572-6"})

    def test_both_isbn_forms_can_coexist(self) -> None:
        doc = parse_document(
            _opf(
                "<dc:identifier opf:scheme=\"ISBN\">0330320025</dc:identifier>"
                "<dc:identifier opf:scheme=\"ISBN\">9781430265726</dc:identifier>"
            )
        )
        identifiers = parse_identifiers(doc)
        self.assertEqual(identifiers["ISBN-10"], "0-330-32002-5")
        self.assertEqual(identifiers["ISBN-13"], "978-1-4302-6572-6")
        self.assertEqual(get_isbn(identifiers), "978-1-4302-6572-6")

    def test_uuid_that_is_a_valid_isbn_fills_isbn(self) -> None:
        doc = parse_document(_opf("<dc:identifier id=\"bookid\">978-1-4302-6572-6</dc:identifier>"))
        self.assertEqual(
            parse_identifiers(doc),
            {"UUID": "978-1-4302-6572-6", "ISBN-13": "978-1-4302-6572-6"},
        )

    def test_uuid_with_bad_checksum_is_not_an_isbn(self) -> None:
        doc = parse_document(_opf("<dc:identifier id=\"bookid\">978-1-4302-6572-0</dc:identifier>"))
        self.assertEqual(parse_identifiers(doc), {"UUID": "978-1-4302-6572-0"})

    def test_uuid_fallback_skipped_when_isbn_present(self) -> None:
        doc = parse_document(
            _opf(
                "<dc:identifier id=\"bookid\">9781430265726</dc:identifier>"
                "<dc:identifier opf:scheme=\"ISBN\">0330320025</dc:identifier>"
            )
        )
        self.assertEqual(
            parse_identifiers(doc),
            {"UUID": "9781430265726", "ISBN-10": "0-330-32002-5"},
        )

    def test_code_list_contains_isbn_labels(self) -> None:
        self.assertEqual(ONIX_CODE_LIST_5["2"], "ISBN-10")
        self.assertEqual(ONIX_CODE_LIST_5["15"], "ISBN-13")
        self.assertEqual(ONIX_CODE_LIST_5["6"], "DOI")


if __name__ == "__main__":
    unittest.main()
