"""Main application window"""
from PySide6.QtWidgets import QMainWindow, QFileDialog, QStatusBar

from ..core.config import ReviewConfig
from .video_player import VideoPlayer

VIDEO_FILTER = "Video Files (*.mp4 *.mov *.MOV *.avi *.mkv *.webm);;All Files (*)"


class MainWindow(QMainWindow):
    """Single-video review window"""

    def __init__(self, config: ReviewConfig = None):
        super().__init__()
        self.config = config or ReviewConfig()
        self._init_ui()

    def _init_ui(self):
        self.setWindowTitle("Pose Review")
        self.setMinimumSize(900, 700)
        self.setStyleSheet("QMainWindow { background-color: #1a1a2e; }")

        self.player = VideoPlayer(self.config)
        self.setCentralWidget(self.player)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Press Ctrl+O to open a video")
        self.player.status_message.connect(self.status_bar.showMessage)

        file_menu = self.menuBar().addMenu("File")

        open_action = file_menu.addAction("Open Video...")
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self._open_video)

        save_action = file_menu.addAction("Save Frame...")
        save_action.setShortcut("Ctrl+S")
        save_action.triggered.connect(self.player.save_frame)

        file_menu.addSeparator()

        exit_action = file_menu.addAction("Quit")
        exit_action.setShortcut("Ctrl+Q")
        exit_action.triggered.connect(self.close)

    def _open_video(self):
        file_path, _ = QFileDialog.getOpenFileName(self, "Open Video", "", VIDEO_FILTER)
        if file_path:
            self.load_video(file_path)

    def load_video(self, file_path: str):
        if self.player.load_video(file_path):
            self.status_bar.showMessage(f"Loaded {file_path}")

    def closeEvent(self, event):
        """Stop detection and release the video before closing"""
        self.player.cleanup()
        super().closeEvent(event)
