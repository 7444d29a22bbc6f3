"""
Tests for friendly error messages and interaction error replies.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from utils.error_handler import ErrorTranslator, handle_error

def test_unregistered_setting_message():
    message = ErrorTranslator.translate_error(KeyError("multiverse-d616.customConditions is not a registered setting"))
    assert "multiverse-d616.customConditions" in message

def test_wrapped_error_is_unwrapped():
    class CommandInvokeError(Exception):
        pass

    wrapper = CommandInvokeError("Command raised an exception")
    wrapper.original = ValueError("bad slug")
    assert ErrorTranslator.translate_error(wrapper) == "The value we're trying to use isn't valid: bad slug"

def test_unknown_error_type():
    assert ErrorTranslator.translate_error(RuntimeError("boom")) == "An unexpected error occurred: boom"

@pytest.mark.asyncio
@pytest.mark.parametrize("done", [True, False])
async def test_handle_error_replies_ephemeral(done):
    interaction = Mock()
    interaction.command.name = "Extempore: Create Effect"
    interaction.response.is_done.return_value = done
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()

    await handle_error(interaction, RuntimeError("boom"))

    sender = interaction.followup.send if done else interaction.response.send_message
    sender.assert_awaited_once()
    assert sender.await_args.kwargs["ephemeral"] is True
    assert sender.await_args.kwargs["embed"].fields[0].value == "`Extempore: Create Effect`"
