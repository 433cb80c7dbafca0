"""
Constants shared across the ZAI SDK: API origins, environment variable
names, token lifetimes and model identifiers.
"""

VERSION = "1.0.0"

# API origins
Z_AI_BASE_URL = "https://api.z.ai/api/paas/v4/"
ZHIPU_AI_BASE_URL = "https://open.bigmodel.cn/api/paas/v4/"

# Environment variable names
ENV_API_KEY = "ZAI_API_KEY"
ENV_BASE_URL = "ZAI_BASE_URL"

# Transport defaults
DEFAULT_TIMEOUT_MS = 60000
DEFAULT_MAX_RETRIES = 2
USER_AGENT = f"z-ai-sdk-python/{VERSION}"

# The service rejects tokens older than API_TOKEN_TTL_SECONDS, so cached
# tokens are retired 30s before that.
API_TOKEN_TTL_SECONDS = 3 * 60
CACHE_TTL_SECONDS = API_TOKEN_TTL_SECONDS - 30

# Text generation models
MODEL_CHAT_GLM_4_PLUS = "glm-4-plus"
MODEL_CHAT_GLM_4_AIR = "glm-4-air"
MODEL_CHAT_GLM_4_FLASH = "glm-4-flash"
MODEL_CHAT_GLM_4 = "glm-4"
MODEL_CHAT_GLM_4_0520 = "glm-4-0520"
MODEL_CHAT_GLM_4_AIRX = "glm-4-airx"
MODEL_CHAT_GLM_4_LONG = "glm-4-long"
MODEL_CHAT_GLM_4_VOICE = "glm-4-voice"

# Vision models
MODEL_CHAT_GLM_4V_PLUS = "glm-4v-plus"
MODEL_CHAT_GLM_4V = "glm-4v"
MODEL_CHAT_GLM_4V_FLASH = "glm-4v-flash"

# Image generation models
MODEL_COGVIEW_3_PLUS = "cogview-3-plus"
MODEL_COGVIEW_3 = "cogview-3"

# Embedding models
MODEL_EMBEDDING_2 = "embedding-2"
MODEL_EMBEDDING_3 = "embedding-3"
