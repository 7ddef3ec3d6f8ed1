"""Remodra API - business management backend for contractors"""
