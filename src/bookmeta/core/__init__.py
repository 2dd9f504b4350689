# ABOUTME: Resolution core: rate gate, result cache, per-source pipeline, and multi-source resolver.
# ABOUTME: Everything here is asyncio-based and honours explicit cancellation.
