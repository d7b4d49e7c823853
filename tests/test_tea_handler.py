"""Tests for the tea collection handler."""

import json

import pytest

from teahouse.handlers.menu import TEA_MENU, teas_by_type
from teahouse.mcp.errors import HandlerError
from teahouse.mcp.models import PromptGetParams, ResourceReadParams, ToolCallParams


class TestTeaTools:
    """Tests for tea tools."""

    @pytest.mark.asyncio
    async def test_tea_names_are_sorted(self, tea_handler):
        result = await tea_handler.call_tool(ToolCallParams(name="getTeaNames"))
        names = json.loads(result.content[0].text)
        assert names == sorted(TEA_MENU)
        assert len(names) == 8

    @pytest.mark.asyncio
    async def test_tea_info(self, tea_handler):
        result = await tea_handler.call_tool(
            ToolCallParams(name="getTeaInfo", arguments={"name": "earl-grey"})
        )
        tea = json.loads(result.content[0].text)
        assert tea["name"] == "Earl Grey"
        assert tea["temperature"] == 212
        assert tea["steepTime"] == "3-5 minutes"

    @pytest.mark.asyncio
    async def test_tea_info_unknown_tea_is_not_an_error(self, tea_handler):
        result = await tea_handler.call_tool(
            ToolCallParams(name="getTeaInfo", arguments={"name": "matcha"})
        )
        assert result.content[0].text == "Tea 'matcha' not found in our collection"

    @pytest.mark.asyncio
    async def test_tea_info_requires_name(self, tea_handler):
        with pytest.raises(HandlerError, match="name parameter is required"):
            await tea_handler.call_tool(ToolCallParams(name="getTeaInfo"))

    @pytest.mark.asyncio
    async def test_tea_info_rejects_non_string_name(self, tea_handler):
        with pytest.raises(HandlerError, match="must be a string"):
            await tea_handler.call_tool(
                ToolCallParams(name="getTeaInfo", arguments={"name": 3})
            )

    @pytest.mark.asyncio
    async def test_teas_by_type(self, tea_handler):
        result = await tea_handler.call_tool(
            ToolCallParams(name="getTeasByType", arguments={"type": "Oolong Tea"})
        )
        teas = json.loads(result.content[0].text)
        assert {t["name"] for t in teas} == {"Da Hong Pao", "Tie Guan Yin"}

    @pytest.mark.asyncio
    async def test_teas_by_unknown_type(self, tea_handler):
        result = await tea_handler.call_tool(
            ToolCallParams(name="getTeasByType", arguments={"type": "Herbal"})
        )
        assert result.content[0].text == "No teas found of type 'Herbal'"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, tea_handler):
        with pytest.raises(HandlerError):
            await tea_handler.call_tool(ToolCallParams(name="brew"))


class TestTeaResources:
    """Tests for the tea menu resource."""

    @pytest.mark.asyncio
    async def test_read_menu(self, tea_handler):
        result = await tea_handler.read_resource(ResourceReadParams(uri="menu://tea"))
        contents = result.contents[0]
        assert contents.mimeType == "application/json"
        menu = json.loads(contents.text)
        assert set(menu) == set(TEA_MENU)
        assert menu["gyokuro"]["origin"] == "Japan"

    @pytest.mark.asyncio
    async def test_read_unknown_uri(self, tea_handler):
        with pytest.raises(HandlerError, match="unknown resource URI"):
            await tea_handler.read_resource(ResourceReadParams(uri="menu://coffee"))


class TestTeaPrompts:
    """Tests for tea prompts."""

    @pytest.mark.asyncio
    async def test_brewing_guide(self, tea_handler):
        result = await tea_handler.get_prompt(
            PromptGetParams(name="brewing_guide", arguments={"tea_name": "gyokuro"})
        )
        message = result.messages[0]
        assert message.role == "user"
        assert "# Brewing Guide for Gyokuro" in message.content.text
        assert "140°F" in message.content.text

    @pytest.mark.asyncio
    async def test_brewing_guide_requires_tea_name(self, tea_handler):
        with pytest.raises(HandlerError, match="tea_name is required"):
            await tea_handler.get_prompt(PromptGetParams(name="brewing_guide"))

    @pytest.mark.asyncio
    async def test_pairing_unknown_tea(self, tea_handler):
        with pytest.raises(HandlerError, match="not found"):
            await tea_handler.get_prompt(
                PromptGetParams(name="tea_pairing", arguments={"tea_name": "matcha"})
            )

    @pytest.mark.asyncio
    async def test_pairing(self, tea_handler):
        result = await tea_handler.get_prompt(
            PromptGetParams(name="tea_pairing", arguments={"tea_name": "assam"})
        )
        text = result.messages[0].content.text
        assert "Breakfast pastries" in text
        assert "Price: $6.50" in text

    @pytest.mark.asyncio
    async def test_recommendation(self, tea_handler):
        result = await tea_handler.get_prompt(
            PromptGetParams(
                name="tea_recommendation",
                arguments={"mood": "relaxing", "caffeine_preference": "high", "flavor_profile": 1},
            )
        )
        text = result.messages[0].content.text
        assert "For a relaxing mood:" in text
        assert "Gyokuro, Earl Grey, Assam" in text
        assert "flavor profile" not in text


def test_teas_by_type_keeps_menu_order():
    assert [t.name for t in teas_by_type("Green Tea")] == ["Dragonwell", "Gyokuro"]
