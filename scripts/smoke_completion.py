# manual smoke test against the configured completion provider (not collected by pytest)

import os
import asyncio
from pathlib import Path
from dotenv import load_dotenv

APP_ENV = os.getenv("APP_ENV", "dev")

# This file is in scripts/, so we go up one level to project root
SERVICE_ROOT = Path(__file__).resolve().parents[1]
env_file_path = SERVICE_ROOT / f".env.{APP_ENV}"

# Load the .env file before the settings are first read
print(f"Loading env file from: {env_file_path}")
load_dotenv(dotenv_path=env_file_path)

from agent_pipelines.config.app_config import get_service_settings
from agent_pipelines.core.lifespan import build_completion_client
from agent_pipelines.common.services.llm_service.llm_client import ChatMessage, CompletionOptions

async def main():
    settings = get_service_settings()
    client = build_completion_client(settings)
    print(f"Provider: {client.provider.value}")

    response = await client.acomplete(
        messages=[
            ChatMessage(role="system", content="You are a specialized smoke-test agent."),
            ChatMessage(role="user", content="Hello! Reply with one short sentence."),
        ],
        options=CompletionOptions(temperature=0.2, max_output_tokens=100),
    )
    print(response)

if __name__ == "__main__":
    asyncio.run(main())
