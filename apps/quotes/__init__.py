"""Quotes app package.

Versioned client quotes. A quote freezes the selected components, prices
and payment schedule at the time it was sent; changes produce a new
revision row instead of mutating the original. Once a booking is made from
a quote, the quote is marked confirmed and no longer changes.
"""
