"""Layout, editing, rendering and export services"""
