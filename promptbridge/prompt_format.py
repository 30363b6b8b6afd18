"""
Prompt templates for text-only providers.

Some providers accept a single prompt string instead of a structured list of
messages. This module holds the closed catalog of templates used to flatten a
conversation for them, the heuristic that picks a template from a model name,
and the renderer itself.

Usage:
    from promptbridge.prompt_format import render, select_format

    fmt = select_format("llama-3-70b-instruct")
    prompt = render(messages, fmt)
"""

import logging
from dataclasses import dataclass

from promptbridge.exceptions import UnsupportedContentError
from promptbridge.message import ImageUrlPart, Message, MessageRole, TextPart, ToolResults

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptFormat:
    """Delimiters used to serialize a conversation for one model family."""

    name: str
    begin: str
    system_pre_message: str
    system_post_message: str
    user_pre_message: str
    user_post_message: str
    assistant_pre_message: str
    assistant_post_message: str
    end: str

    def wrap(self, role: MessageRole, content: str) -> str:
        """Wrap one turn's text in the delimiters of its role."""
        if role == MessageRole.SYSTEM:
            return f"{self.system_pre_message}{content}{self.system_post_message}"
        if role == MessageRole.ASSISTANT:
            return f"{self.assistant_pre_message}{content}{self.assistant_post_message}"
        return f"{self.user_pre_message}{content}{self.user_post_message}"


GENERIC_PROMPT_FORMAT = PromptFormat(
    name="generic",
    begin="",
    system_pre_message="",
    system_post_message="\n",
    user_pre_message="### Instruction:\n",
    user_post_message="\n",
    assistant_pre_message="### Response:\n",
    assistant_post_message="\n",
    end="### Response:\n",
)

ANTHROPIC_PROMPT_FORMAT = PromptFormat(
    name="anthropic",
    begin="",
    system_pre_message="",
    system_post_message="",
    user_pre_message="\n\nHuman: ",
    user_post_message="",
    assistant_pre_message="\n\nAssistant: ",
    assistant_post_message="",
    end="\n\nAssistant: ",
)

MISTRAL_PROMPT_FORMAT = PromptFormat(
    name="mistral",
    begin="",
    system_pre_message="[INST] <<SYS>>",
    system_post_message="<</SYS>> [/INST]",
    user_pre_message="[INST]",
    user_post_message="[/INST]",
    assistant_pre_message="",
    assistant_post_message="",
    end="",
)

LLAMA3_PROMPT_FORMAT = PromptFormat(
    name="llama3",
    begin="<|begin_of_text|>",
    system_pre_message="<|start_header_id|>system<|end_header_id|>\n\n",
    system_post_message="<|eot_id|>",
    user_pre_message="<|start_header_id|>user<|end_header_id|>\n\n",
    user_post_message="<|eot_id|>",
    assistant_pre_message="<|start_header_id|>assistant<|end_header_id|>\n\n",
    assistant_post_message="<|eot_id|>",
    end="<|start_header_id|>assistant<|end_header_id|>\n\n",
)

PHI3_PROMPT_FORMAT = PromptFormat(
    name="phi3",
    begin="",
    system_pre_message="<|system|>\n",
    system_post_message="<|end|>\n",
    user_pre_message="<|user|>\n",
    user_post_message="<|end|>\n",
    assistant_pre_message="<|assistant|>\n",
    assistant_post_message="<|end|>\n",
    end="<|assistant|>\n",
)

COMMAND_R_PROMPT_FORMAT = PromptFormat(
    name="command-r",
    begin="",
    system_pre_message="<|START_OF_TURN_TOKEN|><|SYSTEM_TOKEN|>",
    system_post_message="<|END_OF_TURN_TOKEN|>",
    user_pre_message="<|START_OF_TURN_TOKEN|><|USER_TOKEN|>",
    user_post_message="<|END_OF_TURN_TOKEN|>",
    assistant_pre_message="<|START_OF_TURN_TOKEN|><|CHATBOT_TOKEN|>",
    assistant_post_message="<|END_OF_TURN_TOKEN|>",
    end="<|START_OF_TURN_TOKEN|><|CHATBOT_TOKEN|>",
)

QWEN_PROMPT_FORMAT = PromptFormat(
    name="qwen",
    begin="",
    system_pre_message="<|im_start|>system\n",
    system_post_message="<|im_end|>",
    user_pre_message="<|im_start|>user\n",
    user_post_message="<|im_end|>",
    assistant_pre_message="<|im_start|>assistant\n",
    assistant_post_message="<|im_end|>",
    end="<|im_start|>assistant\n",
)

PROMPT_FORMATS: dict[str, PromptFormat] = {
    fmt.name: fmt
    for fmt in (
        GENERIC_PROMPT_FORMAT,
        ANTHROPIC_PROMPT_FORMAT,
        MISTRAL_PROMPT_FORMAT,
        LLAMA3_PROMPT_FORMAT,
        PHI3_PROMPT_FORMAT,
        COMMAND_R_PROMPT_FORMAT,
        QWEN_PROMPT_FORMAT,
    )
}

# Evaluated top to bottom, first match wins. Matching is case-sensitive.
FORMAT_RULES: tuple[tuple[tuple[str, ...], PromptFormat], ...] = (
    (("llama3", "llama-3"), LLAMA3_PROMPT_FORMAT),
    (("llama2", "llama-2", "mistral", "mixtral"), MISTRAL_PROMPT_FORMAT),
    (("phi3", "phi-3"), PHI3_PROMPT_FORMAT),
    (("command-r",), COMMAND_R_PROMPT_FORMAT),
    (("qwen",), QWEN_PROMPT_FORMAT),
    (("claude",), ANTHROPIC_PROMPT_FORMAT),
)


def select_format(model_name: str) -> PromptFormat:
    """Pick the prompt template for a model name.

    Args:
        model_name: Model identifier as declared by the provider

    Returns:
        The first matching catalog format, or GENERIC_PROMPT_FORMAT
    """
    for patterns, fmt in FORMAT_RULES:
        if any(pattern in model_name for pattern in patterns):
            return fmt
    return GENERIC_PROMPT_FORMAT


def render(messages: list[Message], fmt: PromptFormat) -> str:
    """Flatten a conversation into a single prompt string.

    Part lists contribute their text parts joined by a blank line. Image
    parts are collected across the whole conversation and reported together
    once the pass is complete, so no partial prompt is ever returned.

    Args:
        messages: Conversation in turn order
        fmt: Template to render with

    Returns:
        The rendered prompt

    Raises:
        UnsupportedContentError: If any message carries an image reference
    """
    prompt = fmt.begin
    image_urls: list[str] = []
    for message in messages:
        content = message.content
        if isinstance(content, str):
            text = content
        elif isinstance(content, ToolResults):
            text = ""
        else:
            parts = []
            for part in content:
                if isinstance(part, TextPart):
                    parts.append(part.text)
                elif isinstance(part, ImageUrlPart):
                    image_urls.append(part.url)
            text = "\n\n".join(parts)
        prompt += fmt.wrap(message.role, text)

    if image_urls:
        raise UnsupportedContentError(image_urls)

    logger.debug(f"Rendered {len(messages)} messages with {fmt.name} format")
    return prompt + fmt.end


# Aliases
generate_prompt = render
smart_prompt_format = select_format
