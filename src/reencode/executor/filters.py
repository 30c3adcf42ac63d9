"""Filter graph construction for the encode command.

Stages are collected in a fixed order and serialized into a single
``-filter_complex`` value. When the source is decoded on the GPU, crop and
resize are handed to the decoder (``-crop``/``-resize``) and the software
stages are bracketed by ``hwdownload`` and, for GPU encoders,
``hwupload_cuda``.

Stage order:
    hwdownload, crop, scale, pixel format, denoise, color, pad, title,
    subtitles, watermark, hwupload
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from reencode.policy.color import BT709, PQ_TRANSFER, TransferClass, classify_transfer
from reencode.policy.resolver import TranscodePlan
from reencode.policy.tables import is_hardware_decoder

logger = logging.getLogger(__name__)

OUTPUT_LABEL = "v"

DEFAULT_TONEMAP = "mobius"
DEFAULT_WATERMARK_POSITION = "W-w-48:48"

DENOISE_FILTER = "nlmeans=s=1:p=7:pc=5:r=5:rc=5"
SUBTITLE_STYLE = "Fontname=Arial,Shadow=0,Fontsize=16"

OPENCL_DEVICE_ARGS = ["-init_hw_device", "opencl=gpu:0.0", "-filter_hw_device", "gpu"]

PQ_X265_PARAMS = [
    "hdr-opt=1",
    "repeat-headers=1",
    "colorprim=bt2020",
    "transfer=smpte2084",
    "colormatrix=bt2020nc",
]

# Title overlay timing in whole seconds.
TITLE_FADE_IN = 0
TITLE_DISPLAY = 2
TITLE_FADE_OUT = 1


@dataclass(frozen=True)
class FilterStage:
    """One stage applied to the working video buffer.

    Stages without ``inputs`` are chained together; a stage with extra
    inputs (an overlay) starts its own chain reading the working buffer
    plus those inputs. ``prelude`` is a separate chain producing one of
    those inputs.
    """

    name: str
    expression: str
    inputs: tuple[str, ...] = ()
    prelude: str = ""


@dataclass
class FilterGraph:
    """Filter stages plus the encoder arguments that accompany them."""

    video_input: str
    stages: list[FilterStage] = field(default_factory=list)
    decoder_args: list[str] = field(default_factory=list)
    """Decoder-level crop/resize for GPU decoding, placed before ``-i``."""
    global_args: list[str] = field(default_factory=list)
    output_args: list[str] = field(default_factory=list)
    x265_params: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.stages

    @property
    def stage_names(self) -> list[str]:
        return [stage.name for stage in self.stages]

    def serialize(self) -> str:
        """Render the stages as a ``-filter_complex`` value ending in ``[v]``."""
        chains: list[str] = []
        pending: list[str] = []
        label = f"[{self.video_input}]"
        out = f"[{OUTPUT_LABEL}]"

        for stage in self.stages:
            if not stage.inputs:
                pending.append(stage.expression)
                continue
            if pending:
                chains.append(f"{label}{','.join(pending)}{out}")
                label = out
                pending = []
            if stage.prelude:
                chains.append(stage.prelude)
            extra = "".join(f"[{name}]" for name in stage.inputs)
            chains.append(f"{label}{extra}{stage.expression}{out}")
            label = out

        if pending:
            chains.append(f"{label}{','.join(pending)}{out}")
        return ";".join(chains)


def find_subtitle_file(video_file: Path) -> Path:
    """Return the sidecar ``.srt`` next to a video if present, else the video."""
    sidecar = video_file.with_suffix(".srt")
    if sidecar.exists():
        return sidecar
    return video_file


def escape_filter_path(path: Path | str) -> str:
    """Escape a path for use inside a quoted filter option."""
    value = str(path).replace("\\", "/")
    return value.replace(":/", "\\:/")


def escape_drawtext(text: str) -> str:
    """Escape characters with meaning to the filter parser."""
    return text.replace("\\", "\\\\").replace(":", "\\:").replace("'", "\u2019")


def title_text(plan: TranscodePlan) -> str:
    """Text for the title overlay.

    An explicit title wins, then the title parsed from the file name, then
    the file's base name.
    """
    if plan.profile.title:
        return plan.profile.title
    name = plan.source.title or plan.source.base_name
    return name.replace(".", " ").upper()


def drawtext_filter(plan: TranscodePlan) -> str:
    """Title overlay with a fade-in / hold / fade-out alpha curve."""
    start = int(plan.target.seek)
    display_start = start + TITLE_FADE_IN
    fade_out_start = display_start + TITLE_DISPLAY
    end = fade_out_start + TITLE_FADE_OUT
    alpha = (
        f"if(lt(t,{start}),0,"
        f"if(lt(t,{display_start}),(t-{start})/{TITLE_FADE_IN},"
        f"if(lt(t,{fade_out_start}),1,"
        f"if(lt(t,{end}),({TITLE_FADE_OUT}-(t-{fade_out_start}))/{TITLE_FADE_OUT},0))))"
    )
    options = [f"enable='between(t,{start},{end})'"]
    if plan.profile.font_file:
        options.append(f"fontfile={escape_filter_path(plan.profile.font_file)}")
    options.extend(
        [
            f"text='{escape_drawtext(title_text(plan))}'",
            "fontsize=(w/17)",
            "fontcolor=ffffff",
            f"alpha='{alpha}'",
            "x=(w-text_w)/2",
            "y=(h-text_h)/2",
        ]
    )
    return "drawtext=" + ":".join(options)


def tonemap_filter(algorithm: str) -> str:
    """OpenCL tonemap to bt709, wrapped in upload/download to the device."""
    return (
        "hwupload,"
        f"tonemap_opencl=tonemap={algorithm or DEFAULT_TONEMAP}"
        ":param=0.01:desat=0.0:range=tv"
        ":primaries=bt709:transfer=bt709:matrix=bt709:format=nv12,"
        "hwdownload,format=nv12"
    )


def build_filter_graph(plan: TranscodePlan) -> FilterGraph:
    """Build the video filter graph for a resolved plan.

    Args:
        plan: Resolved transcode plan.

    Returns:
        The graph. Stream copy plans get an empty graph.
    """
    source = plan.source
    target = plan.target
    profile = plan.profile
    graph = FilterGraph(video_input=f"0:v:{source.stream}")
    if plan.is_copy:
        return graph

    hardware_decode = is_hardware_decoder(plan.decoder)
    stages: list[FilterStage] = []

    if source.has_crop:
        crop = source.crop
        if hardware_decode:
            graph.decoder_args.extend(
                ["-crop", f"{crop.top}x{crop.bottom}x{crop.left}x{crop.right}"]
            )
        else:
            stages.append(
                FilterStage(
                    "crop",
                    f"crop={source.width}:{source.height}:{crop.left}:{crop.top}",
                )
            )

    if plan.content_width and (
        plan.content_width != source.width or plan.content_height != source.height
    ):
        if hardware_decode:
            graph.decoder_args.extend(
                ["-resize", f"{plan.content_width}x{plan.content_height}"]
            )
        else:
            stages.append(
                FilterStage(
                    "scale", f"scale={plan.content_width}:{plan.content_height}"
                )
            )

    stages.append(
        FilterStage("format", "format=p010le" if source.is_ten_bit else "format=nv12")
    )

    if profile.denoise:
        stages.append(FilterStage("denoise", DENOISE_FILTER))

    stages.extend(_color_stages(plan, graph))

    if plan.padding is not None:
        pad = plan.padding
        stages.append(
            FilterStage(
                "pad", f"pad={pad.width}:{pad.height}:{pad.x}:{pad.y},setsar=1"
            )
        )

    if profile.draw_title:
        stages.append(FilterStage("drawtext", drawtext_filter(plan)))

    if profile.burn_subtitles:
        subtitle_file = escape_filter_path(find_subtitle_file(source.file))
        stages.append(
            FilterStage(
                "subtitles",
                f"subtitles='{subtitle_file}'"
                f":stream_index={profile.subtitle_stream}"
                f":force_style='{SUBTITLE_STYLE}'",
            )
        )
    elif profile.burn_image_subtitles:
        stages.append(
            FilterStage(
                "image_subtitles",
                "overlay",
                inputs=("s",),
                prelude=(
                    f"[0:s:{profile.subtitle_stream}]"
                    f"scale={target.width}:{target.height}[s]"
                ),
            )
        )

    if plan.uses_watermark:
        position = profile.watermark_position or DEFAULT_WATERMARK_POSITION
        stages.append(
            FilterStage("watermark", f"overlay={position}", inputs=("1:v:0",))
        )

    upload = False
    if hardware_decode and stages:
        stages.insert(0, FilterStage("hwdownload", "hwdownload"))
        if target.is_hardware_encode:
            stages.append(FilterStage("hwupload", "hwupload_cuda"))
            upload = True

    if profile.pixel_format and not upload and not graph.output_args:
        graph.output_args.extend(["-pix_fmt", target.pixel_format])

    graph.stages = stages
    logger.debug("Filter stages for %s: %s", source.file, graph.stage_names)
    return graph


def _color_stages(plan: TranscodePlan, graph: FilterGraph) -> list[FilterStage]:
    source = plan.source
    target = plan.target

    if target.color_transfer == BT709 and source.color_transfer != BT709:
        transfer_class = classify_transfer(source.color_transfer)
        if transfer_class is TransferClass.SDR:
            return [FilterStage("color", "format=yuv420p")]
        if transfer_class.is_hdr:
            graph.global_args.extend(OPENCL_DEVICE_ARGS)
            return [FilterStage("tonemap", tonemap_filter(target.tonemap))]
        if transfer_class is TransferClass.LEGACY:
            return [FilterStage("color", "colormatrix=bt601:bt709")]
        return []

    if target.color_transfer == PQ_TRANSFER and source.color_transfer != PQ_TRANSFER:
        if target.codec == "hevc_nvenc":
            return [FilterStage("color", "zscale=transfer=smpte2084,format=p010le")]
        graph.output_args.extend(["-pix_fmt", "yuv420p10le"])
        if target.codec == "libx265":
            graph.x265_params.extend(PQ_X265_PARAMS)
        return [FilterStage("color", "zscale=transfer=smpte2084")]

    return []
