import unittest

from colophon.document import get_metas, parse_document
from colophon.refine import FlatRefinement, GroupedRefinement, RefineMode, refine_meta


OPF = (
    "<package xmlns=\"http://www.idpf.org/2007/opf\" version=\"3.0\">"
    "<metadata xmlns:dc=\"http://purl.org/dc/elements/1.1/\" xmlns:opf=\"http://www.idpf.org/2007/opf\">"
    "<dc:identifier id=\"foo\" opf:some-prop=\"florp\">txt</dc:identifier>"
    "<meta refines=\"#foo\" property=\"my-prop\" scheme=\"my:scheme\">some-val</meta>"
    "<meta refines=\"#foo\" property=\"my-prop2\" scheme=\"my:scheme\">some-val2</meta>"
    "<meta refines=\"#foo\" property=\"my-prop3\">some-val3</meta>"
    "<meta refines=\"#foo\">no property</meta>"
    "<meta refines=\"#other\" property=\"ignored\">x</meta>"
    "<dc:identifier opf:scheme=\"URI\">http://example.com</dc:identifier>"
    "</metadata>"
    "</package>"
)


class RefineMetaTests(unittest.TestCase):
    def setUp(self) -> None:
        self.doc = parse_document(OPF)
        self.identifier, self.anonymous = get_metas(self.doc, "dc:identifier")

    def test_grouped_by_scheme(self) -> None:
        view = refine_meta(self.doc, self.identifier, RefineMode.GROUPED)
        self.assertIsInstance(view, GroupedRefinement)
        self.assertEqual(
            view.schemes,
            {
                "noScheme": {"id": "foo", "opf:some-prop": "florp", "my-prop3": "some-val3"},
                "my:scheme": {"my-prop": "some-val", "my-prop2": "some-val2"},
            },
        )
        self.assertEqual(view.element_id, "foo")

    def test_flat_merges_everything(self) -> None:
        view = refine_meta(self.doc, self.identifier, RefineMode.FLAT)
        self.assertIsInstance(view, FlatRefinement)
        self.assertEqual(
            view.values,
            {
                "id": "foo",
                "opf:some-prop": "florp",
                "my-prop": "some-val",
                "my-prop2": "some-val2",
                "my-prop3": "some-val3",
            },
        )

    def test_drop_schemes_strips_prefixes(self) -> None:
        view = refine_meta(self.doc, self.identifier, RefineMode.FLAT, drop_schemes=True)
        self.assertEqual(view.get("some-prop"), "florp")
        self.assertIsNone(view.get("opf:some-prop"))

    def test_element_without_id_is_not_refined(self) -> None:
        view = refine_meta(self.doc, self.anonymous, RefineMode.GROUPED)
        self.assertEqual(view.schemes, {"noScheme": {"opf:scheme": "URI"}})

    def test_unknown_scheme_lookup_is_empty(self) -> None:
        view = refine_meta(self.doc, self.identifier)
        self.assertEqual(view.scheme("onix:codelist5"), {})


if __name__ == "__main__":
    unittest.main()
