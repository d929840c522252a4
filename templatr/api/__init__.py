"""HTTP surface for thumbnails, downloads and deck export"""
