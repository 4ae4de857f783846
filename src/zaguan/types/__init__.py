from .chat import (
    ChatChunk,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    Choice,
    ChunkChoice,
    ContentPart,
    Delta,
    Role,
    TokenDetails,
    Usage,
)
from .tool import FunctionDelta, ToolCall, ToolCallDelta, ToolCallFunction
from .account import (
    CreditsBalance,
    CreditsHistory,
    CreditsHistoryEntry,
    CreditsStats,
    CreditsStatsEntry,
    CreditsStatsSummary,
    ModelCapabilities,
    ModelInfo,
    UsageBreakdown,
)
from .embeddings import (
    Embedding,
    EmbeddingsResponse,
    EmbeddingsUsage,
    ModerationResponse,
    ModerationResult,
)
from .batch import Batch, BatchError, BatchErrors, BatchList, BatchRequestCounts

__all__ = [
    "ChatChunk",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Choice",
    "ChunkChoice",
    "ContentPart",
    "Delta",
    "Role",
    "TokenDetails",
    "Usage",
    "FunctionDelta",
    "ToolCall",
    "ToolCallDelta",
    "ToolCallFunction",
    "CreditsBalance",
    "CreditsHistory",
    "CreditsHistoryEntry",
    "CreditsStats",
    "CreditsStatsEntry",
    "CreditsStatsSummary",
    "ModelCapabilities",
    "ModelInfo",
    "UsageBreakdown",
    "Embedding",
    "EmbeddingsResponse",
    "EmbeddingsUsage",
    "ModerationResponse",
    "ModerationResult",
    "Batch",
    "BatchError",
    "BatchErrors",
    "BatchList",
    "BatchRequestCounts",
]
