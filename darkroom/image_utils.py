"""
 https://pyimagesearch.com/2017/06/19/image-difference-with-opencv-and-python/

 https://scikit-image.org/docs/stable/api/skimage.metrics.html#skimage.metrics.structural_similarity
"""

from skimage.metrics import structural_similarity as compare_ssim
import cv2

SSIM_MIN_SIDE = 7               # default window of compare_ssim

def gray(img):
    """Return a 1-channel version of img. A gray image is returned as is."""
    if img.ndim == 2:
        return img
    return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)

def img_sim(imageA, imageB):
    """Structural similarity of two images on a scale of 0 to 1.0.
    Images of different sizes are not similar at all."""
    grayA = gray(imageA)
    grayB = gray(imageB)

    if grayA.shape == grayB.shape:
        if min(grayA.shape) < SSIM_MIN_SIDE:
            return 1.0 if (grayA == grayB).all() else 0
        return compare_ssim(grayA, grayB)
    else:
        return 0

def sharpness(img):
    """The variance of the Laplacian. Blurring lowers it."""
    return cv2.Laplacian(gray(img), cv2.CV_64F).var()
