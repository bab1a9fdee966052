"""
Вспомогательные функции
"""
