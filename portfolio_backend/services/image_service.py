import logging
import os
import shutil
import uuid
from typing import BinaryIO

from portfolio_backend.services.exceptions import FileSystemError

logger = logging.getLogger(__name__)


class ImageService:
    FOLDERS = ("users", "skills", "portfolio", "experience")

    def __init__(self, upload_root: str):
        """
        ImageService를 초기화합니다.

        Args:
            upload_root: 업로드 이미지를 저장할 루트 디렉터리.
                엔티티 종류별 하위 폴더(users, skills, portfolio, experience)가 만들어집니다.
        """
        self.upload_root = upload_root

    def path_for(self, folder: str, name: str) -> str:
        """폴더와 파일 이름으로 이미지의 실제 파일 시스템 경로를 만듭니다."""
        if folder not in self.FOLDERS:
            raise ValueError(f"Unknown upload folder '{folder}'.")
        # 경로 조작 방지: 파일 이름만 사용
        return os.path.join(self.upload_root, folder, os.path.basename(name))

    def save(self, folder: str, filename: str, stream: BinaryIO) -> str:
        """
        업로드된 이미지를 새로 생성한 고유한 이름으로 저장합니다.

        원본 파일 이름의 확장자는 유지하고, 이름은 uuid4로 새로 만듭니다.

        Args:
            folder: 저장할 하위 폴더 이름.
            filename: 클라이언트가 보낸 원본 파일 이름.
            stream: 이미지 바이트를 읽을 수 있는 파일 객체.

        Returns:
            저장된 파일의 새 이름 (경로 제외).

        Raises:
            FileSystemError: 디렉터리 생성이나 파일 쓰기에 실패했을 때.
        """
        new_name = str(uuid.uuid4()) + os.path.splitext(filename or "")[1]
        target_path = self.path_for(folder, new_name)
        try:
            os.makedirs(os.path.dirname(target_path), exist_ok=True)
            with open(target_path, "wb") as out:
                shutil.copyfileobj(stream, out)
        except OSError as e:
            logger.error("Failed to save uploaded file '%s': %s", target_path, e)
            raise FileSystemError("Failed to save uploaded file") from e

        logger.info("Image saved: %s", target_path)
        return new_name

    def delete(self, folder: str, name: str) -> bool:
        """
        이미지 파일을 삭제합니다.

        Returns:
            성공적으로 삭제되었거나 파일이 원래 없었으면 True를 반환합니다.

        Raises:
            FileSystemError: 파일 삭제에 실패했을 때.
        """
        if not name:
            return True
        image_path = self.path_for(folder, name)
        if not os.path.exists(image_path):
            logger.info("Image file not found, skipping delete: %s", image_path)
            return True
        try:
            os.remove(image_path)
        except OSError as e:
            logger.error("Failed to delete image file '%s': %s", image_path, e)
            raise FileSystemError("Failed to delete image file") from e

        logger.info("Image file successfully deleted: %s", image_path)
        return True
