"""Vakit-Period - Namaz vakti periyot durum makinesi ve geçiş zamanlayıcısı."""

__version__ = "0.1.0"
