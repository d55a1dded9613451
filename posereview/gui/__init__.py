"""Qt widgets for posereview"""
