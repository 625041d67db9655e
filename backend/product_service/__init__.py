"""
Product Service - product catalog, stock and product images
"""
