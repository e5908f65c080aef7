"""
Bot module for Glimpse: the Telegram image describing bot.

Flow of a single update:
    webhook body -> models.parseUpdate -> UpdateDispatcher
      -> AnalysisPipeline (FileRetriever, cache, vision model, sanitizer)
      -> DeliveryLayer

Key Components:
- UpdateDispatcher: routes commands, texts and media
- AnalysisPipeline: download, validate, analyze, sanitize and cache
- DeliveryLayer: sends replies, falling back to plain text on parse errors
- BotApplication: wires everything together from the configuration
"""
