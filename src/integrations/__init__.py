"""
Integrations Module - Responses API Stream Handling
===================================================

Modules:
    event_handlers: Per-family handlers that turn Responses API stream
        events into NormalizedEvent instances, plus the routing table.

Event families:
    lifecycle, text, reasoning, tool calling (function, code interpreter,
    file search, web search, custom tools), image generation, audio, MCP,
    refusal, structural (output items and content parts) and computer use.

Example:
    Dispatching vendor events::

        from integrations.event_handlers import StreamState, dispatch_event

        state = StreamState()
        async for vendor_event in stream:
            for event in dispatch_event(vendor_event, state):
                print(event.event, event.payload())

See Also:
    :mod:`api.services.responses_service`: Stream orchestrator using the registry
"""
