"""Core domain models and services for recipe search"""
