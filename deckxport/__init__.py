"""
Deckxport.

Imports Moxfield decks and enriches every card with Scryfall card data and
Scryfall Tagger oracle tags, backed by a persistent TTL cache.
"""
