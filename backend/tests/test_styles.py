"""Tests for the template catalogue."""

import pytest

from solvix.services.styles import (
    STYLES, UnknownTemplateError, aliases_for, get_style, resolve_template, template_ids,
)

TEMPLATE_IDS = ["classic", "modern", "minimal", "creative", "corporate", "artisan", "elegant", "professional"]


def test_eight_templates():
    assert template_ids() == TEMPLATE_IDS


@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_get_style_by_id(template_id):
    assert get_style(template_id).id == template_id


@pytest.mark.parametrize("alias,template_id", [
    ("classique", "classic"),
    ("moderne", "modern"),
    ("minimaliste", "minimal"),
    ("creatif", "creative"),
    ("Créatif", "creative"),
    ("professionnel", "professional"),
    ("  CORPORATE ", "corporate"),
])
def test_french_aliases_and_case(alias, template_id):
    assert get_style(alias).id == template_id


def test_aliases_for():
    assert aliases_for("creative") == ["creatif", "créatif"]
    assert aliases_for("artisan") == []


@pytest.mark.parametrize("identifier", ["", "baroque", None])
def test_unknown_template_raises(identifier):
    with pytest.raises(UnknownTemplateError):
        get_style(identifier)


def test_resolve_template_falls_back_to_classic(caplog):
    assert resolve_template("baroque").id == "classic"
    assert "baroque" in caplog.text


def test_styles_are_visually_distinct():
    palettes = {(s.primary, s.accent, s.font_family, s.header) for s in STYLES.values()}
    assert len(palettes) == len(STYLES)
