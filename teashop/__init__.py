"""
Teashop - ordering back end for a bubble-tea shop
Checkout, Mollie payments, loyalty points and order confirmation mails
"""
__version__ = "1.0.0"
