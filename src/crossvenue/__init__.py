"""
crossvenue: cross-venue prediction-market matching and arbitrage.

Submodules:
    crossvenue.models      Market, match, opportunity and trade-plan records
    crossvenue.matching    title normalisation, index, gate, scorer, matcher
    crossvenue.arbitrage   locked-arbitrage calculator and price book
    crossvenue.config      YAML configuration and logging setup
    crossvenue.reporting   rich tables for matches and opportunities
"""

__version__ = "0.1.0"
