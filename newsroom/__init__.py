"""
Newsroom backend: posts, images with thumbnails, and Google identity guarded admin writes.
"""
