"""CLI 入口模块 -- python -m yapkit <command>

支持的命令：
  send MESSAGE  提交一条反馈（可附带图片/视频）

配置从环境变量读取（YAPKIT_API_KEY / YAPKIT_API_BASE_URL / YAPKIT_TIMEOUT_S）。
"""

import argparse
import asyncio
import sys
from pathlib import Path

from .config import load_feedback_config
from .device import collect_device_info
from .exceptions import YapKitError
from .loader import load_image_attachment, load_video_attachment
from .logging_config import setup_logging
from .models import Attachment, FeedbackResponse, FeedbackType, UploadProgress
from .service import FeedbackService

VIDEO_EXTENSIONS = {".mp4", ".m4v", ".mov", ".webm"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yapkit", description="Send feedback to a Yapback API")
    subparsers = parser.add_subparsers(dest="command", required=True)

    send = subparsers.add_parser("send", help="submit one piece of feedback")
    send.add_argument("message", help="feedback text")
    send.add_argument(
        "--type",
        dest="feedback_type",
        choices=[t.value for t in FeedbackType],
        default=None,
    )
    send.add_argument("--email", default=None, help="contact email (kept private)")
    send.add_argument(
        "--attach",
        dest="attachments",
        action="append",
        default=[],
        type=Path,
        metavar="PATH",
        help="image or video file; may be repeated",
    )
    send.add_argument("--app-version", default="Unknown")
    send.add_argument("--build-number", default="Unknown")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI 主入口"""
    args = build_parser().parse_args(argv)
    setup_logging()

    if args.command == "send":
        try:
            response = asyncio.run(send_feedback(args))
        except (YapKitError, ValueError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Feedback submitted: {response.feedback_id}")
        if response.github_issue:
            print(f"GitHub issue: {response.github_issue}")


async def load_attachment(path: Path) -> Attachment:
    """按扩展名选择视频或图片构造路径"""
    if path.suffix.lower() in VIDEO_EXTENSIONS:
        return await load_video_attachment(path)
    return load_image_attachment(path.read_bytes())


def print_progress(progress: UploadProgress) -> None:
    print(
        f"Uploading {progress.attachment_index + 1}/{progress.total_attachments}"
        f" ({progress.overall_progress:.0%})",
        file=sys.stderr,
    )


async def send_feedback(args: argparse.Namespace) -> FeedbackResponse:
    """执行一次提交"""
    message = args.message.strip()
    if not message:
        raise ValueError("Feedback message must not be empty.")
    email = (args.email or "").strip() or None

    service = FeedbackService(load_feedback_config())
    device_info = collect_device_info(args.app_version, args.build_number)
    feedback_type = FeedbackType(args.feedback_type) if args.feedback_type else None

    if not args.attachments:
        return await service.submit(
            message,
            feedback_type=feedback_type,
            email=email,
            device_info=device_info,
        )

    attachments = [await load_attachment(path) for path in args.attachments]
    return await service.submit_with_attachments(
        message,
        attachments,
        feedback_type=feedback_type,
        email=email,
        device_info=device_info,
        progress_handler=print_progress,
    )


if __name__ == "__main__":
    main()
