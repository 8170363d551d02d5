"""
表示ウィジェット（メディアグリッド + ライトボックス）の状態管理。
"""
