from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..models.data_models import Paper


def get_mock_papers(now: Optional[datetime] = None) -> List[Paper]:
    now = now or datetime.now(timezone.utc)
    return [
        Paper(
            id="mock-1",
            title="Succinct Non-Interactive Arguments from Folding Schemes",
            url="https://eprint.iacr.org/2021/370",
            authors="Abhiram Kothapalli, Srinath Setty, Ioanna Tzialla",
            created_at=now - timedelta(hours=3),
            vote_count=12,
            tags=["zkp", "folding"],
        ),
        Paper(
            id="mock-2",
            title="Plonk: Permutations over Lagrange-bases for Oecumenical Noninteractive arguments",
            url="https://eprint.iacr.org/2019/953",
            authors="Ariel Gabizon, Zachary J. Williamson, Oana Ciobotaru",
            created_at=now - timedelta(days=10),
            vote_count=40,
            tags=["zkp", "crypto"],
        ),
        Paper(
            id="mock-3",
            title="Efficient Multiparty Computation with Dishonest Majority",
            url="https://eprint.iacr.org/2011/535",
            authors="Ivan Damgard, Valerio Pastro, Nigel Smart, Sarah Zakarias",
            created_at=now - timedelta(days=2),
            vote_count=5,
            tags=["mpc", "crypto"],
        ),
        Paper(
            id="mock-4",
            title="Nova: Recursive Zero-Knowledge Arguments from Folding Schemes",
            url="https://eprint.iacr.org/2021/370v2",
            authors="Abhiram Kothapalli, Srinath Setty",
            created_at=now - timedelta(days=1),
            vote_count=7,
            tags=["zkp", "folding", "recursion"],
        ),
        Paper(
            id="mock-5",
            title="Bitcoin: A Peer-to-Peer Electronic Cash System",
            url="https://bitcoin.org/bitcoin.pdf",
            authors="Satoshi Nakamoto",
            created_at=now - timedelta(days=90),
            vote_count=0,
            tags=["blockchain"],
        ),
    ]
