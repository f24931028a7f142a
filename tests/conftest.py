import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.adapters.llm_adapter import LLMAdapter, ProviderInfo  # noqa: E402
from src.adapters.retrieval_client import RetrievalClient  # noqa: E402

PROMPTS_PATH = project_root / "config" / "prompts.yaml"


@pytest.fixture
def test_env_file():
    """Create a temporary .env file for testing."""
    with tempfile.NamedTemporaryFile(mode="w", delete=False, suffix=".env") as f:
        f.write("LLM_API_KEY=test_llm_key\n")
        f.write("LLM_API_BASE=http://localhost:11434/v1\n")
        f.write("LLM_MODEL=test-model\n")
        f.write("LLM_PROVIDER=ollama\n")
        f.write("RETRIEVAL_BASE_URL=http://retrieval.test\n")
        f.write("RESPONSE_CACHE_MAX_ENTRIES=50\n")
        f.write("CONVERSATION_MAX_TURNS=3\n")
        f.write("RAG_SECTIONS_CAP=30\n")
        f.write("LOG_LEVEL=DEBUG\n")
        f.write("API_HOST=127.0.0.1\n")
        f.write("API_PORT=8001\n")
        temp_path = f.name

    yield temp_path

    # Cleanup
    os.environ.pop("DOTENV_PATH", None)
    os.unlink(temp_path)


@pytest.fixture
def prompts_path():
    return PROMPTS_PATH


@pytest.fixture
def mock_llm_adapter():
    """LLM adapter returning a fixed reply."""
    adapter = Mock(spec=LLMAdapter)
    adapter.chat = AsyncMock(return_value="DOrSU offers many programs.")
    adapter.get_provider_info = Mock(
        return_value=ProviderInfo(provider="test", model="test-model")
    )
    adapter.close = AsyncMock()
    return adapter


@pytest.fixture
def mock_retrieval_client():
    """Retrieval client returning a fixed knowledge-base block."""
    client = Mock(spec=RetrievalClient)
    client.get_context_for_topic = AsyncMock(
        return_value="## Programs\nBSIT - Bachelor of Science in Information Technology"
    )
    client.close = AsyncMock()
    return client
