"""Constants"""

# pylint: disable=too-few-public-methods
class C:
    """Constants"""
    IMAGE_EXTENSIONS = set(['.jpg','.jpeg','.png','.bmp','.tif','.tiff'])
    MOVIE_EXTENSIONS = set(['.mp4','.avi','.mov','.mkv'])

    # Where things live, relative to the working directory
    IMAGES_DIR      = '../Images/'
    EFFECTS_DIR     = '../Images with Effects/'
    ADJUSTMENTS_DIR = '../Images with Adjustments/'
    EDITED_DIR      = '../Edited Images/'
    VIDEOS_DIR      = '../Videos/'
    DEFAULT_IMAGE   = 'cat.png'

    # Adjustment ranges
    BRIGHTNESS_MIN = -100
    BRIGHTNESS_MAX = 100
    CONTRAST_MIN   = 0
    CONTRAST_MAX   = 10
    HUE_MIN        = 0
    HUE_MAX        = 180
    HUE_MODULUS    = 180        # OpenCV stores 8-bit hue in [0,180)

    # Cartoon parameters
    CARTOON_MEDIAN_KERNEL   = 7
    CARTOON_BLOCK_SIZE      = 21
    CARTOON_THRESHOLD_C     = 7
    CARTOON_BILATERAL_D     = 21
    CARTOON_SIGMA_COLOR     = 250
    CARTOON_SIGMA_SPACE     = 250

    # Display and video
    DISPLAY_HEIGHT   = 540
    ESC              = 27
    VIDEO_FOURCC     = 'mp4v'
    DEFAULT_WAIT_MS  = 33
    PROGRESS_STEPS   = 10
    PROGRESS_CHAR    = '█'

    DEFAULT_JPEG_QUALITY = 90
