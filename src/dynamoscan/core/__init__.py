"""Core components: configuration, result cache and the analysis orchestrator."""
