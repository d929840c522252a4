"""Small pure helpers shared by the services"""
