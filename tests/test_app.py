"""Tests for the headless command line entry point."""

import json

from avatarpicker.app import apply_selection, build_parser, main


def test_parser_defaults():
    args = build_parser().parse_args(["assets/data.json"])
    assert args.config == "assets/data.json"
    assert args.sex is None
    assert args.item == []
    assert args.remove == []
    assert not args.verbose


def test_parser_repeatable_options():
    args = build_parser().parse_args([
        "assets", "--sex", "female", "--body", "2", "--head", "1",
        "--item", "a", "--item", "b", "--remove", "upper", "--skin", "s", "-v",
    ])
    assert args.item == ["a", "b"]
    assert args.remove == ["upper"]
    assert args.body == "2"
    assert args.skin == "s"
    assert args.verbose


def test_apply_selection(session):
    args = build_parser().parse_args([
        "unused", "--sex", "female", "--remove", "upper",
    ])
    apply_selection(session, args)

    assert session.index.visible_body.name == "female_body_1_head_1"
    assert [i.name for i in session.index.visible_items()] == ["female_pants_1"]
    assert not session.is_complete


def test_apply_selection_items_after_removal(session):
    args = build_parser().parse_args([
        "unused", "--remove", "lower", "--item", "male_pants_2",
    ])
    apply_selection(session, args)
    assert [i.name for i in session.index.visible_items()] == [
        "male_shirt_1", "male_pants_2",
    ]


def test_main_with_missing_catalog(tmp_path):
    assert main([str(tmp_path / "missing.json")]) == 2


def test_main_with_invalid_catalog(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"bodies": []}))
    assert main([str(tmp_path)]) == 2
