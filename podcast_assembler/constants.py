"""Magic numbers and defaults for program assembly."""

TARGET_SAMPLE_RATE = 44100          # Hz, canonical PCM sample rate
TARGET_CHANNELS = 1                 # canonical PCM is mono
TARGET_BITS_PER_SAMPLE = 16         # canonical PCM is signed 16-bit
INT16_MIN = -32768
INT16_MAX = 32767
WAV_FORMAT_PCM = 1
WAV_FORMAT_EXTENSIBLE = 0xFFFE
CONTINUOUS_BGM_DB = -20.0           # continuous BGM level under speech
JINGLE_INTERVAL = 6                 # insert a jingle after every Nth line
LAUGHTER_MODE = "replace"           # replace | mute | audio
LAUGHTER_MODES = ("replace", "mute", "audio")
LAUGHTER_PLACEHOLDER = "わっはっは"   # spoken in place of a laughter marker
STAGE_SPEAKER = "__STAGE__"         # speaker name for non-spoken stage lines
PROGRAM_TYPES = ("podcast", "presentation", "quiz")
OUTPUT_FORMATS = ("wav", "mp3")
MP3_FRAME_SAMPLES = 1152            # samples per MP3 encoder frame
MP3_BITRATE_KBPS = 128
TTS_RETRY_COUNT = 3                 # max retries per TTS line
TTS_RETRY_BASE_DELAY = 0.3          # seconds, base delay for exponential backoff
TTS_RETRY_MAX_DELAY = 2.0           # seconds, backoff ceiling
TTS_CONCURRENCY = 4                 # parallel synthesis calls
TTS_CACHE_VERSION = 1
TTS_RATE = "+5%"                    # edge-tts speech rate
TTS_PITCH = "+0Hz"                  # edge-tts pitch shift
VOICE_A = "ja-JP-NanamiNeural"      # host
VOICE_B = "ja-JP-KeitaNeural"       # co-host
ASSET_DIR = "persistent_data/assets/audios"
LAUGH_SFX = "persistent_data/assets/sfx/laugh.wav"
OUTPUT_DIR = "output"
VERSION = "0.1.0"

# Asset names per program type. Bare filenames resolve under ASSET_DIR.
ASSET_SETS = {
    "podcast": {
        "opening": "Broadcast News Short.wav",
        "ending": "Broadcast News Medium.wav",
        "jingle": "Electro Beep Accent 03.wav",
        "continuous": "bgm001.wav",
    },
    "presentation": {
        "opening": "presentation.wav",
        "ending": "presentation_long.wav",
        "jingle": "jingle.wav",
        "continuous": "bgm002.wav",
    },
    "quiz": {
        "opening": "Quiz opening.wav",
        "ending": "Quiz ending.wav",
        "jingle": "Electro Beep Accent 03.wav",
        "continuous": "bgm001.wav",
        "countdown": "countdown.wav",
    },
}
