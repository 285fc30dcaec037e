"""Integration adapters: Telegram, the WebSub hub, feed parsing and HTTP."""
