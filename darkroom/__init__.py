"""Design document.

Abstractions related to image content:

Frame - Holds a single picture: a JPEG or PNG read from the disk, or a
        single frame of a video. The pixels are a numpy array with
        either 1 channel (gray) or 3 channels (BGR).

        A Frame is mutated in place by the filters: the array is
        replaced and the operation is appended to the frame's history.

FrameSequence - An ordered list of Frames representing a video. All of
        the frames share the same number of channels.

Abstractions related to editing:

EffectSpec, AdjustmentSpec - Parameter records. The values are never
        rejected; a value that is out of range disables that field when
        the filters are applied.

Filters - Pure functions over numpy images (blur, grayscale, cartoon,
        brightness, contrast, hue). Each returns the same object when
        it has nothing to do.

Stage - The nodes of the pipeline. Each filter is wrapped in a Stage
        that catches its failures so that the frame continues through
        the remaining stages.

Pipeline - Moves frames through a linear list of stages. The
        ThreadPoolPipeline runs every frame of a sequence in its own
        worker; frames are independent, so the result does not depend
        on the order in which they are processed.

Assets and projects:

EditableAsset - An image or a video together with its optional
        EffectSpec and AdjustmentSpec. apply_all() runs the filters in a
        fixed order: contrast, brightness, hue, blur, grayscale, cartoon.

Project - A list of assets, saved as flat text.

Menu - The console front end. It is constructed with an AppContext
       rather than being a process-wide object.
"""
