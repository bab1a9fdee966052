"""
Ядро HabitLife: модели, агрегация, цели, черновик дня
"""
