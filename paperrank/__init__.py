# paperrank/__init__.py

"""
논문 공유 사이트의 랭킹/추천 패키지 루트.

- rule_based: hot/top/new 정렬, 관련 논문, 개인화 추천, 네트워크 그래프
- data: MongoDB(papers, votes) 로딩 및 투표 기록
- interface: HTTP 핸들러가 호출하는 서비스 함수
"""
