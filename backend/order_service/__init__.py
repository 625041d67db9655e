"""
Order Service - order placement backed by the Product Service
"""
