"""Tests for catalog loading, validation and lookups."""

import json

import pytest

from avatarpicker.catalog.catalog import Catalog
from avatarpicker.core.errors import ConfigError


def test_load_from_document(catalog):
    assert catalog.body_names() == [
        "male_body_1_head_1", "male_body_2_head_1", "female_body_1_head_1",
    ]
    body = catalog.find_body("male_body_1_head_1")
    assert body.items == ("male_shirt_1", "male_pants_1", "male_pants_2")
    assert body.skins == ("male_skin_1",)
    assert body.inv_data == "inv/male_body_1_head_1"
    assert catalog.find_item("male_pants_1").location == "lower"
    assert catalog.find_skin("male_skin_1").texture_sources()["head"] == \
        "textures/male_skin_1_head.png"


def test_missing_lookups_return_none(catalog):
    assert catalog.find_body("nobody") is None
    assert catalog.find_item("nothing") is None
    assert catalog.find_skin("bare") is None


def test_settings(catalog):
    settings = catalog.settings
    assert settings.default_sex == "male"
    assert settings.default_body_name == "male_body_1_head_1"
    assert settings.items_for("female") == ("female_shirt_1", "female_pants_1")
    assert settings.skin_for("male") == "male_skin_1"
    assert settings.items_for("other") == ()
    assert settings.required_locations == ("lower", "upper")


def test_locations_come_from_items(catalog):
    assert catalog.locations() == {"lower", "upper"}


@pytest.mark.parametrize("section", ["bodies", "items", "skins", "settings"])
def test_missing_section(catalog_document, section):
    del catalog_document[section]
    with pytest.raises(ConfigError, match=section):
        Catalog.load(catalog_document)


def test_section_must_be_array(catalog_document):
    catalog_document["items"] = {"male_shirt_1": {}}
    with pytest.raises(ConfigError):
        Catalog.load(catalog_document)


def test_duplicate_name_within_section(catalog_document):
    catalog_document["items"].append(dict(catalog_document["items"][0]))
    with pytest.raises(ConfigError, match="duplicate"):
        Catalog.load(catalog_document)


def test_duplicate_name_across_sections(catalog_document):
    catalog_document["skins"][0]["name"] = "male_shirt_1"
    catalog_document["bodies"][0]["skins"] = ["male_shirt_1"]
    catalog_document["bodies"][1]["skins"] = []
    catalog_document["settings"]["default_skin"]["male"] = "male_shirt_1"
    with pytest.raises(ConfigError, match="duplicate"):
        Catalog.load(catalog_document)


def test_unresolved_item_reference(catalog_document):
    catalog_document["bodies"][0]["items"].append("male_hat_1")
    with pytest.raises(ConfigError, match="male_hat_1"):
        Catalog.load(catalog_document)


def test_unresolved_skin_reference(catalog_document):
    catalog_document["bodies"][2]["skins"] = ["female_skin_9"]
    with pytest.raises(ConfigError, match="female_skin_9"):
        Catalog.load(catalog_document)


def test_unresolved_default_item(catalog_document):
    catalog_document["settings"]["default_items"]["male"] = ["male_kilt_1"]
    with pytest.raises(ConfigError, match="male_kilt_1"):
        Catalog.load(catalog_document)


def test_default_items_must_be_array(catalog_document):
    catalog_document["settings"]["default_items"]["male"] = "male_shirt_1"
    with pytest.raises(ConfigError, match="default_items for male must be an array"):
        Catalog.load(catalog_document)


def test_item_requires_location(catalog_document):
    del catalog_document["items"][0]["location"]
    with pytest.raises(ConfigError, match="location"):
        Catalog.load(catalog_document)


def test_wrong_category(catalog_document):
    catalog_document["items"][0]["category"] = "body"
    with pytest.raises(ConfigError):
        Catalog.load(catalog_document)


def test_inv_data_camel_case_accepted(catalog_document):
    item = catalog_document["items"][0]
    item["invData"] = item.pop("inv_data")
    catalog = Catalog.load(catalog_document)
    assert catalog.find_item("male_shirt_1").inv_data == "inv/male_shirt_1"


def test_skin_without_texture_is_allowed(catalog_document):
    catalog_document["skins"][1]["head"] = ""
    catalog = Catalog.load(catalog_document)
    assert catalog.find_skin("female_skin_1").head == ""


def test_required_locations_default(catalog_document):
    del catalog_document["settings"]["required_locations"]
    catalog = Catalog.load(catalog_document)
    assert catalog.settings.required_locations == ("lower", "upper")


def test_preload_bodies(catalog_document):
    catalog_document["bodies"][2]["preload"] = True
    catalog = Catalog.load(catalog_document)
    assert catalog.preload_body_names() == ["female_body_1_head_1"]


def test_load_from_file_resolves_paths(tmp_path, catalog_document):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(catalog_document))

    catalog = Catalog.load(path)
    assert catalog.base_dir == tmp_path
    assert catalog.resolve_path("models/a.glb") == str(tmp_path / "models" / "a.glb")
    assert catalog.resolve_path("https://cdn/a.glb") == "https://cdn/a.glb"

    from_dir = Catalog.load(tmp_path)
    assert from_dir.body_names() == catalog.body_names()


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        Catalog.load(tmp_path / "missing.json")


def test_load_invalid_json(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{ not json")
    with pytest.raises(ConfigError, match="not valid JSON"):
        Catalog.load(path)


def test_document_paths_unchanged_without_base_dir(catalog):
    assert catalog.resolve_path("models/a.glb") == "models/a.glb"
