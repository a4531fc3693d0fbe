"""Unit tests for JSON lore flattening."""

import pytest

from silicon_oracle.exceptions import MalformedInput
from silicon_oracle.indexing.flattener import flatten_document


class TestFlattenDocument:
    def test_nested_objects_build_key_path(self):
        document = {"capitolo1": {"storia": "Il Metro-Centro fu costruito nel 2347."}}

        assert flatten_document(document) == "capitolo1 > storia: Il Metro-Centro fu costruito nel 2347.\n"

    def test_array_indices_are_not_part_of_label(self):
        document = {"fazioni": [{"nome": "Ferrovieri"}, {"nome": "Scavatori"}]}

        assert flatten_document(document) == "fazioni > nome: Ferrovieri\nfazioni > nome: Scavatori\n"

    def test_document_label_seeds_the_path(self):
        text = flatten_document({"luoghi": {"Lingotto": "Serre idroponiche"}}, label="manuale")

        assert text == "manuale > luoghi > Lingotto: Serre idroponiche\n"

    def test_non_string_leaves_and_blank_strings_are_ignored(self):
        document = {"anno": 3000, "attivo": True, "note": None, "vuoto": "", "spazi": "   ", "testo": "ok"}

        assert flatten_document(document) == "testo: ok\n"

    @pytest.mark.parametrize("value", [{}, [], None, 42, False])
    def test_empty_or_scalar_inputs_produce_empty_text(self, value):
        assert flatten_document(value) == ""

    def test_root_string_is_emitted_without_label(self):
        assert flatten_document("Solo testo") == "Solo testo\n"

    def test_value_is_kept_verbatim(self):
        text = flatten_document({"motto": "  Sopravvivi.  "})

        assert text == "motto:   Sopravvivi.  \n"

    def test_every_string_leaf_appears_once(self):
        document = {
            "a": ["uno", {"b": "due", "c": ["tre", "quattro"]}],
            "d": {"e": {"f": "cinque"}},
        }
        lines = flatten_document(document).splitlines()
        values = [line.split(": ", 1)[1] for line in lines]

        assert sorted(values) == sorted(["uno", "due", "tre", "quattro", "cinque"])

    def test_flattening_is_deterministic(self):
        document = {"x": {"y": ["a", "b"], "z": "c"}, "w": "d"}

        assert flatten_document(document) == flatten_document(document)

    def test_cycle_raises_malformed_input(self):
        document = {"a": {}}
        document["a"]["self"] = document

        with pytest.raises(MalformedInput):
            flatten_document(document)

    def test_depth_guard(self):
        document = current = {}
        for _ in range(10):
            current["n"] = {}
            current = current["n"]
        current["leaf"] = "profondo"

        with pytest.raises(MalformedInput):
            flatten_document(document, max_depth=5)
        assert "profondo" in flatten_document(document)

    def test_unsupported_type_raises(self):
        with pytest.raises(MalformedInput):
            flatten_document({"data": object()})

    def test_shared_subtree_is_not_a_cycle(self):
        shared = {"nome": "Torre"}
        document = {"a": shared, "b": shared}

        assert flatten_document(document) == "a > nome: Torre\nb > nome: Torre\n"
