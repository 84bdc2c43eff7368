# field_catalog.py
# Description: The known field set of each settings slice (llama-cli, llama-embedding, application paths).
#
# Imports
from typing import Dict, List, Optional
#
# Local Imports
from .field_model import FieldKind, FieldSpec
#
#######################################################################################################################
#
# Functions:


def _plain(name: str, label: str = "") -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.PLAIN, value_key=name, label=label)


def _pair(name: str, label: str = "", value_key: Optional[str] = None) -> FieldSpec:
    return FieldSpec(
        name=name,
        kind=FieldKind.FLAG_VALUE,
        cmd_key=f"{name}Cmd",
        value_key=value_key or f"{name}Val",
        label=label,
    )


def _toggle(name: str, label: str = "", enabled_key: Optional[str] = None) -> FieldSpec:
    return FieldSpec(
        name=name,
        kind=FieldKind.FLAG_TOGGLE,
        cmd_key=f"{name}Cmd",
        value_key=enabled_key or f"{name}CmdEnabled",
        label=label,
    )


# --- Primary engine (llama-cli) ---
PRIMARY_ENGINE_FIELDS: List[FieldSpec] = [
    _plain("Description", "Description"),
    _pair("Model", "Model", value_key="ModelFullPathVal"),
    _pair("Prompt", "Prompt", value_key="PromptText"),
    _pair("ChatTemplate", "Chat Template"),
    _toggle("Conversation", "Conversation Mode"),
    _toggle("MultilineInput", "Multiline Input"),
    _pair("CtxSize", "Context Size"),
    _pair("RopeScale", "RoPE Scale"),
    _pair("PromptCache", "Prompt Cache"),
    _pair("PromptFile", "Prompt File"),
    _toggle("InteractiveFirst", "Interactive First"),
    _toggle("InteractiveMode", "Interactive Mode"),
    _pair("ReversePrompt", "Reverse Prompt"),
    _pair("InPrefix", "Input Prefix"),
    _pair("InSuffix", "Input Suffix"),
    _pair("GPULayers", "GPU Layers"),
    _pair("ThreadsBatch", "Threads (batch)"),
    _pair("Threads", "Threads"),
    _pair("Keep", "Keep Tokens"),
    _pair("TopK", "Top-K"),
    _pair("TopP", "Top-P"),
    _pair("MinP", "Min-P"),
    _pair("MainGPU", "Main GPU"),
    _pair("RepeatPenalty", "Repeat Penalty"),
    _pair("RepeatLastPenalty", "Repeat Last N"),
    _toggle("MemLock", "Lock Model In Memory"),
    _toggle("EscapeNewLines", "Escape Newlines"),
    _toggle("FlashAttention", "Flash Attention"),
    _pair("Temperature", "Temperature"),
    _pair("Predict", "Tokens To Predict"),
    _pair("ModelLogFile", "Model Log File", value_key="ModelLogFileNameVal"),
    _toggle("NoDisplayPrompt", "Hide Prompt", enabled_key="NoDisplayPromptEnabled"),
    _toggle("LogVerbose", "Verbose Logging", enabled_key="LogVerboseEnabled"),
]

# --- Embedding engine (llama-embedding) ---
EMBEDDING_ENGINE_FIELDS: List[FieldSpec] = [
    _plain("Description", "Description"),
    _pair("EmbedModelPath", "Model", value_key="EmbedModelFullPathVal"),
    _pair("EmbedCtxSize", "Context Size"),
    _pair("EmbedBatchSize", "Batch Size"),
    _pair("EmbedUbatchSize", "Micro-batch Size"),
    _pair("EmbedSeparator", "Separator"),
    _pair("EmbedPooling", "Pooling"),
    _pair("EmbedOutputFormat", "Output Format"),
    _pair("EmbedNormalize", "Normalize"),
    _pair("EmbedGPULayers", "GPU Layers"),
    _pair("EmbedMainGPU", "Main GPU"),
    _pair("EmbedThreads", "Threads"),
    _pair("EmbedThreadsBatch", "Threads (batch)"),
    _pair("EmbedKeep", "Keep Tokens"),
    _toggle("EmbedFlashAttention", "Flash Attention"),
    _pair("EmbedModelLogFile", "Model Log File", value_key="EmbedModelLogFileNameVal"),
]

# --- Application paths ---
APP_PATH_FIELDS: List[FieldSpec] = [
    _plain("LLamaCliPath", "llama-cli Executable"),
    _plain("LLamaEmbedCliPath", "llama-embedding Executable"),
    _plain("AppLogPath", "Application Log Folder"),
    _plain("AppLogFileName", "Application Log File"),
    _plain("ModelPath", "Model Folder"),
    _plain("ModelFileName", "Default Model File"),
    _plain("ModelFullPathVal", "Default Model Path"),
    _plain("EmbedModelFileName", "Default Embedding Model File"),
    _plain("EmbedModelFullPathVal", "Default Embedding Model Path"),
    _plain("ModelLogPath", "Model Log Folder"),
    _plain("PromptCachePath", "Prompt Cache Folder"),
    _plain("PromptTemplatePath", "Prompt Template Folder"),
    _plain("DocumentPath", "Document Folder"),
    _plain("ReportDataPath", "Report Data Folder"),
]

SLICE_CATALOGS: Dict[str, List[FieldSpec]] = {
    "llama_cli": PRIMARY_ENGINE_FIELDS,
    "llama_embed": EMBEDDING_ENGINE_FIELDS,
    "app_paths": APP_PATH_FIELDS,
}

#
# End of field_catalog.py
#######################################################################################################################
