import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///simon.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Game pacing (milliseconds)
    START_DELAY_MS = int(os.environ.get('START_DELAY_MS', '1000'))
    NEXT_ROUND_DELAY_MS = int(os.environ.get('NEXT_ROUND_DELAY_MS', '1000'))
    # Window after a correct press during which further presses are ignored. 0 disables.
    INPUT_ACK_MS = int(os.environ.get('INPUT_ACK_MS', '400'))
    # easy, medium, hard or expert
    DEFAULT_DIFFICULTY = os.environ.get('DEFAULT_DIFFICULTY', 'medium')
    # Storage slot for the persisted statistics
    STATS_KEY = os.environ.get('STATS_KEY', 'simonGameStats')
    SOUND_ENABLED = os.environ.get('SOUND_ENABLED', '1') not in ('0', 'false', 'False', '')
    # Optional: debounce start requests (ms). 0 disables.
    CONTROLLER_DEBOUNCE_MS = int(os.environ.get('CONTROLLER_DEBOUNCE_MS', '0'))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
