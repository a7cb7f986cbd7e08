"""Runtime configuration, prompts and provider clients."""
