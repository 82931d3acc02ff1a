import os
import requests
from tqdm import tqdm


def download_file(url: str, filename: str):
    if os.path.exists(filename):
        print(f"File {filename} already exists. Skipping download.")
        return filename

    response = requests.get(url, stream=True, timeout=60)
    response.raise_for_status()
    total_size = int(response.headers.get('content-length', 0))

    # only a complete download lands at filename
    partial = filename + ".part"
    with open(partial, "wb") as f, tqdm(
        desc=os.path.basename(filename),
        total=total_size,
        unit='iB',
        unit_scale=True,
        unit_divisor=1024,
    ) as pbar:
        for data in response.iter_content(chunk_size=1024):
            size = f.write(data)
            pbar.update(size)
    os.replace(partial, filename)

    print(f"Downloaded {filename}")
    return filename


def download_data(data_config, download: bool = True):
    """
    Make sure the training and test CSVs exist in ``data_config.raw_dir``.

    Args:
        data_config: DataConfig holding the two URLs and the raw directory
        download: when False, only check that the files are already there
    Returns:
        (train_path, test_path)
    """
    os.makedirs(data_config.raw_dir, exist_ok=True)
    paths = []
    for url, path in [(data_config.train_url, data_config.train_path),
                      (data_config.test_url, data_config.test_path)]:
        if download:
            download_file(url, path)
        elif not os.path.exists(path):
            raise FileNotFoundError(
                f"Data file not found at: {path}\n"
                f"Run without --no-download or place the file from {url} there."
            )
        paths.append(path)
    return tuple(paths)
